import math
from datetime import date
from sqlalchemy import func, extract
from models import db, Transaction, Category, CLASSIFICATIONS
from date_filters import apply_date_range, month_range

# Every query here is scoped to one user; the caller passes the authenticated user's id.

def _money(value):
    return float(value or 0)

def _round_half_up(x):
    return int(math.floor(x + 0.5))

def _expense_query(user_id, *columns):
    return db.session.query(*columns).select_from(Transaction).join(Category, Transaction.category_id == Category.id).filter(
        Transaction.user_id == user_id, Category.type == 'expense')

def dashboard_totals(user_id, today=None):
    """Current month totals per category type plus a daily expense series for the chart."""
    today = today or date.today()
    period = month_range(today.year, today.month)

    q = db.session.query(Category.type, func.sum(Transaction.amount)).select_from(Transaction).join(
        Category, Transaction.category_id == Category.id
    ).filter(Transaction.user_id == user_id)
    q = apply_date_range(q, Transaction.created_at, period)
    totals = {t: 0.0 for t in ('income', 'expense', 'investment')}
    for ctype, total in q.group_by(Category.type).all():
        totals[ctype] = _money(total)

    day = extract('day', Transaction.created_at).label('day')
    daily = apply_date_range(_expense_query(user_id, day, func.sum(Transaction.amount)),
                             Transaction.created_at, period)
    rows = daily.group_by(day).order_by(day).all()
    chart = [{'name': f'{int(d):02d}', 'amount': _money(amount)} for d, amount in rows]

    return {
        'balance': totals['income'] - totals['expense'] - totals['investment'],
        'expenses': totals['expense'],
        'income': totals['income'],
        'investments': totals['investment'],
        'chartData': chart,
    }

def classification_breakdown(user_id, date_range=None):
    q = _expense_query(user_id, Transaction.classification, func.sum(Transaction.amount))
    q = apply_date_range(q, Transaction.created_at, date_range)
    result = {c: 0.0 for c in CLASSIFICATIONS}
    for classification, total in q.group_by(Transaction.classification).all():
        if classification in result:
            result[classification] = _money(total)
    return result

def period_summary(user_id, date_range, period=None):
    """Expenses per category within the period, with each category's share of the total."""
    total_col = func.sum(Transaction.amount)
    q = _expense_query(user_id, Category.id, Category.name, Category.icon, total_col)
    q = apply_date_range(q, Transaction.created_at, date_range)
    rows = q.group_by(Category.id, Category.name, Category.icon).order_by(total_col.desc(), Category.id).all()

    total_expenses = sum(_money(r[3]) for r in rows)
    categories = []
    for cid, name, icon, amount in rows:
        amount = _money(amount)
        if amount <= 0:
            continue
        categories.append({
            'id': cid,
            'name': name,
            'icon': icon,
            'amount': amount,
            'percentage': _round_half_up(amount / total_expenses * 100) if total_expenses > 0 else 0,
        })
    return {'totalExpenses': total_expenses, 'period': period, 'categories': categories}

def _history_query(user_id, date_range=None, classification=None):
    q = db.session.query(Transaction, Category).outerjoin(
        Category, Transaction.category_id == Category.id
    ).filter(Transaction.user_id == user_id)
    q = apply_date_range(q, Transaction.created_at, date_range)
    # unknown values (including 'all') mean no filter
    if classification in CLASSIFICATIONS:
        q = q.filter(Transaction.classification == classification)
    return q

def history_row(tx, category):
    return {
        'id': tx.id,
        'categoryId': tx.category_id,
        'amount': f'{tx.amount:.2f}',
        'note': tx.note,
        'classification': tx.classification,
        'createdAt': tx.created_at.isoformat() if tx.created_at else None,
        'category': category.name if category else None,
        'icon': category.icon if category else None,
        'type': category.type if category else None,
    }

def transaction_history(user_id, date_range=None, classification=None, page=1, limit=50):
    q = _history_query(user_id, date_range, classification)
    total = q.count()
    total_pages = math.ceil(total / limit) if limit else 0
    rows = q.order_by(Transaction.created_at.desc(), Transaction.id.desc()).offset((page - 1) * limit).limit(limit).all()
    return {
        'data': [history_row(tx, cat) for tx, cat in rows],
        'pagination': {'page': page, 'limit': limit, 'total': total, 'totalPages': total_pages},
    }

def history_rows(user_id, date_range=None, classification=None):
    q = _history_query(user_id, date_range, classification)
    rows = q.order_by(Transaction.created_at.desc(), Transaction.id.desc()).all()
    return [history_row(tx, cat) for tx, cat in rows]
