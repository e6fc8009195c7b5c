from werkzeug.security import generate_password_hash
from models import db, Category, User
from logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_CATEGORIES = [
    # Income
    ('Salary', 'Wallet', 'income'),
    ('Gifts Received', 'Gift', 'income'),
    ('Refunds', 'Repeat', 'income'),
    # Investment
    ('Index Funds', 'TrendingUp', 'investment'),
    ('ETFs', 'BarChart3', 'investment'),
    ('Savings', 'Landmark', 'investment'),
    # Expense
    ('Housing', 'Home', 'expense'),
    ('Groceries', 'ShoppingCart', 'expense'),
    ('Transport', 'Train', 'expense'),
    ('Subscriptions', 'Cloud', 'expense'),
    ('Services', 'Activity', 'expense'),
    ('Health', 'Pill', 'expense'),
    ('Leisure', 'PartyPopper', 'expense'),
    ('Shopping', 'Package', 'expense'),
    ('Gifts Given', 'Heart', 'expense'),
    ('Other', 'Settings', 'expense'),
]

def seed_categories():
    """Insert the default categories unless the table already has rows. Returns the number inserted."""
    if db.session.query(Category.id).first() is not None:
        logger.info('seed_skipped', reason='categories already present')
        return 0
    for name, icon, ctype in DEFAULT_CATEGORIES:
        db.session.add(Category(name=name, icon=icon, type=ctype))
    db.session.commit()
    logger.info('seed_completed', categories=len(DEFAULT_CATEGORIES))
    return len(DEFAULT_CATEGORIES)

def ensure_admin(username, password):
    """Create the admin user, or reset its password to the configured one."""
    user = User.query.filter_by(username=username).first()
    if user is None:
        user = User(username=username, password_hash=generate_password_hash(password))
        db.session.add(user)
        logger.info('admin_created', username=username)
    else:
        user.password_hash = generate_password_hash(password)
    db.session.commit()
    return user
