# run.py
"""
Development server for the split ledger API.
"""
import os
from split_ledger.app_factory import create_app
from split_ledger.db.auto_init import auto_init
from split_ledger.logger import get_logger

logger = get_logger(__name__)


def get_app_base_dir():
    return os.path.abspath(os.path.dirname(__file__))


def configure_database():
    """
    Default DATABASE_URL to split_ledger.db in the project root.
    An explicit DATABASE_URL (env or .env) wins.
    """
    if not os.environ.get("DATABASE_URL"):
        db_path = os.path.join(get_app_base_dir(), "split_ledger.db")
        os.environ["DATABASE_URL"] = f"sqlite:///{db_path}"
    logger.info(f"Using database: {os.environ['DATABASE_URL']}")


def main():
    # the app factory loads .env on import, before the URL is defaulted
    app = create_app()

    configure_database()
    auto_init()

    logger.info(f"Routes: {app.url_map}")

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", 5000))
    app.run(host=host, port=port, debug=True, use_reloader=False)


if __name__ == "__main__":
    main()
