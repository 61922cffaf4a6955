from dataclasses import dataclass
from typing import Optional

from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from storefront.config import Settings
from storefront.database import Base, build_engine, build_session_factory
from storefront.services.image_service import CloudinaryImageStore


@dataclass
class AppContext:
    """Process-wide resources built at startup and injected into requests"""
    settings: Settings
    engine: Engine
    session_factory: sessionmaker
    image_store: CloudinaryImageStore

    @classmethod
    def create(cls, settings: Settings, image_store: Optional[CloudinaryImageStore] = None) -> "AppContext":
        engine = build_engine(settings.DATABASE_URL)
        return cls(
            settings=settings,
            engine=engine,
            session_factory=build_session_factory(engine),
            image_store=image_store or CloudinaryImageStore(settings),
        )

    def init_db(self) -> None:
        # Register every model on Base.metadata
        import storefront.models  # noqa: F401
        Base.metadata.create_all(bind=self.engine)

    def close(self) -> None:
        self.image_store.session.close()
        self.engine.dispose()
