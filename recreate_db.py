"""
Script to drop and recreate the storefront tables for the configured database
"""
from storefront.config import get_settings
from storefront.context import AppContext
from storefront.database import Base


def main():
    settings = get_settings()
    context = AppContext.create(settings)
    try:
        print(f"Dropping tables on {context.engine.url.render_as_string(hide_password=True)}...")
        import storefront.models  # noqa: F401
        Base.metadata.drop_all(bind=context.engine)
        print("Creating database tables...")
        context.init_db()
        print(f"Created tables: {', '.join(sorted(Base.metadata.tables))}")
    finally:
        context.close()


if __name__ == "__main__":
    main()
