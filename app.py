import csv
import io
import os
from datetime import datetime
from decimal import Decimal, InvalidOperation
from flask import Flask, Blueprint, current_app, jsonify, request, send_from_directory
from flask_cors import CORS
from werkzeug.exceptions import HTTPException, NotFound
from models import db, Category, Transaction, UserSettings, CLASSIFICATIONS, THEMES
from auth import auth_bp, jwt, login_required
from config import Config
from date_filters import PERIODS, date_filter_from_args, resolve_period
from logging_config import configure_logging, get_logger
from rate_limit import InMemoryRateLimitStore, RateLimiter
from reports import dashboard_totals, classification_breakdown, period_summary, transaction_history, history_rows
from seed import seed_categories, ensure_admin

logger = get_logger(__name__)
api = Blueprint('api', __name__, url_prefix='/api')


class ValidationError(Exception):
    """Rejected input on a write endpoint. Reported through the generic 500 handler."""


def create_app(overrides=None, rate_limit_store=None):
    app = Flask(__name__, static_folder=None)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)
    configure_logging(app.config['LOG_LEVEL'])

    db.init_app(app)
    jwt.init_app(app)
    origins = [o.strip() for o in app.config['CORS_ORIGINS'].split(',') if o.strip()]
    CORS(app, resources={r'/api/*': {'origins': origins}}, supports_credentials=True)

    app.extensions['login_rate_limiter'] = RateLimiter(
        rate_limit_store or InMemoryRateLimitStore(),
        max_attempts=app.config['LOGIN_MAX_ATTEMPTS'],
        window_seconds=app.config['LOGIN_WINDOW_SECONDS'],
    )

    app.register_blueprint(auth_bp)
    app.register_blueprint(api)
    register_error_handlers(app)
    register_frontend(app)

    with app.app_context():
        db.create_all()
        seed_categories()
        ensure_admin(app.config['ADMIN_USER'], app.config['ADMIN_PASS'])
    logger.info('app_started', database=app.config['SQLALCHEMY_DATABASE_URI'].split('://')[0])
    return app

# ---------------------- Errors ----------------------
def register_error_handlers(app):
    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return jsonify({'error': e.description or e.name}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(e):
        db.session.rollback()
        logger.exception('unhandled_error', path=request.path, error=str(e))
        return jsonify({'error': str(e)}), 500

# ---------------------- Frontend ----------------------
def register_frontend(app):
    """Serve the built SPA: /assets from disk, every other non-API path gets index.html."""
    def public_dir():
        return os.path.abspath(app.config['PUBLIC_DIR'])

    @app.route('/assets/<path:filename>')
    def assets(filename):
        return send_from_directory(os.path.join(public_dir(), 'assets'), filename)

    @app.route('/', defaults={'path': ''})
    @app.route('/<path:path>')
    def spa(path):
        if path == 'api' or path.startswith('api/'):
            raise NotFound('Not Found')
        if path and os.path.isfile(os.path.join(public_dir(), path)):
            return send_from_directory(public_dir(), path)
        return send_from_directory(public_dir(), 'index.html')

# ---------------------- Request Helpers ----------------------
def _page_args():
    default = current_app.config['HISTORY_PAGE_SIZE']
    page = request.args.get('page', 1, type=int) or 1
    limit = request.args.get('limit', default, type=int) or default
    return max(page, 1), min(max(limit, 1), current_app.config['HISTORY_MAX_PAGE_SIZE'])

def _parse_amount(value):
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError('Amount must be a number')
    if not amount.is_finite() or amount < 0:
        raise ValidationError('Amount must be a non-negative number')
    return amount.quantize(Decimal('0.01'))

def _parse_note(value):
    note = str(value or '').strip()
    if not note:
        raise ValidationError('Note is required')
    return note

def _parse_category(value):
    try:
        category = db.session.get(Category, int(value))
    except (TypeError, ValueError):
        category = None
    if category is None:
        raise ValidationError('Unknown category')
    return category

def _parse_classification(value):
    if value in (None, ''):
        return None
    if value not in CLASSIFICATIONS:
        raise ValidationError(f'Classification must be one of: {", ".join(CLASSIFICATIONS)}')
    return value

def _parse_created_at(value):
    try:
        ts = datetime.fromisoformat(str(value).strip().replace('Z', '+00:00'))
    except ValueError:
        raise ValidationError('createdAt must be an ISO-8601 date')
    if ts.tzinfo is not None:
        ts = ts.astimezone().replace(tzinfo=None)
    return ts

def _apply_transaction_fields(tx, data, partial=False):
    if not partial or 'categoryId' in data:
        tx.category_id = _parse_category(data.get('categoryId')).id
    if not partial or 'amount' in data:
        tx.amount = _parse_amount(data.get('amount'))
    if not partial or 'note' in data:
        tx.note = _parse_note(data.get('note'))
    if 'classification' in data:
        tx.classification = _parse_classification(data.get('classification'))
    if data.get('createdAt'):
        tx.created_at = _parse_created_at(data['createdAt'])

# ---------------------- API: Reports ----------------------
@api.route('/dashboard')
@login_required
def api_dashboard(user):
    return jsonify(dashboard_totals(user.id))

@api.route('/classification-breakdown')
@login_required
def api_classification_breakdown(user):
    return jsonify(classification_breakdown(user.id, date_filter_from_args(request.args)))

@api.route('/summary')
@login_required
def api_summary(user):
    period = request.args.get('period')
    if period not in PERIODS:
        period = 'month'
    period_range = resolve_period(period, request.args.get('startDate'), request.args.get('endDate'))
    return jsonify(period_summary(user.id, period_range, period))

@api.route('/history')
@login_required
def api_history(user):
    page, limit = _page_args()
    return jsonify(transaction_history(
        user.id,
        date_range=date_filter_from_args(request.args),
        classification=request.args.get('classification'),
        page=page,
        limit=limit,
    ))

@api.route('/export.csv')
@login_required
def api_export_csv(user):
    rows = history_rows(user.id, date_filter_from_args(request.args), request.args.get('classification'))
    si = io.StringIO()
    writer = csv.writer(si)
    writer.writerow(['date', 'amount', 'type', 'category', 'classification', 'note'])
    for r in rows:
        writer.writerow([r['createdAt'], r['amount'], r['type'] or '', r['category'] or '', r['classification'] or '', r['note']])
    output = si.getvalue().encode('utf-8')
    return (output, 200, {'Content-Type': 'text/csv; charset=utf-8', 'Content-Disposition': 'attachment; filename=transactions.csv'})

# ---------------------- API: Categories & Transactions ----------------------
@api.route('/categories')
@login_required
def api_categories(user):
    return jsonify([c.to_dict() for c in Category.query.order_by(Category.id).all()])

@api.route('/transactions', methods=['POST'])
@login_required
def create_transaction(user):
    data = request.get_json(silent=True) or {}
    tx = Transaction(user_id=user.id)
    _apply_transaction_fields(tx, data)
    db.session.add(tx)
    db.session.commit()
    logger.info('transaction_created', transaction_id=tx.id, category_id=tx.category_id, amount=str(tx.amount))
    return jsonify({'success': True, 'id': tx.id})

@api.route('/transactions/<int:txn_id>', methods=['PUT'])
@login_required
def update_transaction(txn_id, user):
    tx = Transaction.query.filter_by(id=txn_id, user_id=user.id).first()
    if not tx:
        return jsonify({'error': 'Transaction not found'}), 404
    _apply_transaction_fields(tx, request.get_json(silent=True) or {}, partial=True)
    db.session.commit()
    logger.info('transaction_updated', transaction_id=tx.id)
    return jsonify({'success': True, 'id': tx.id})

@api.route('/transactions/<int:txn_id>', methods=['DELETE'])
@login_required
def delete_transaction(txn_id, user):
    deleted = Transaction.query.filter_by(id=txn_id, user_id=user.id).delete()
    db.session.commit()
    logger.info('transaction_deleted', transaction_id=txn_id, deleted=deleted)
    return jsonify({'success': True})

# ---------------------- API: Settings ----------------------
def _settings_for(user):
    settings = UserSettings.query.filter_by(user_id=user.id).first()
    if settings is None:
        settings = UserSettings(user_id=user.id, theme='dark', language='en')
        db.session.add(settings)
        db.session.commit()
    return settings

@api.route('/settings', methods=['GET'])
@login_required
def get_settings(user):
    return jsonify(_settings_for(user).to_dict())

@api.route('/settings', methods=['POST'])
@login_required
def update_settings(user):
    data = request.get_json(silent=True) or {}
    theme = data.get('theme')
    language = data.get('language')
    if theme is not None and theme not in THEMES:
        raise ValidationError('Theme must be light or dark')
    settings = _settings_for(user)
    if theme is not None:
        settings.theme = theme
    if language:
        settings.language = str(language).strip()
    settings.updated_at = datetime.now()
    db.session.commit()
    return jsonify({'success': True, 'theme': settings.theme, 'language': settings.language})


# ---------------------- Run App ----------------------
app = create_app()

if __name__ == '__main__':
    app.run(host='0.0.0.0', port=int(os.environ.get('PORT', 3000)), debug=False)
