"""
Gestionnaire de base de données partagé pour les microservices
"""

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import StaticPool

from .utils import LoggerFactory


logger = LoggerFactory.get_logger("database")


class DatabaseManager:
    """Gestionnaire de base de données d'un microservice"""

    def __init__(self, database_url: str, base=None, echo: bool = False):
        self.database_url = database_url
        self.base = base or declarative_base()
        self.echo = echo
        self.engine = None
        self.SessionLocal = None

    def initialize(self) -> None:
        """Initialise la connexion et crée les tables"""
        try:
            if self.database_url.startswith("sqlite"):
                # Configuration SQLite
                self.engine = create_engine(
                    self.database_url,
                    connect_args={"check_same_thread": False},
                    poolclass=StaticPool,
                    echo=self.echo
                )
            else:
                self.engine = create_engine(self.database_url, pool_pre_ping=True, echo=self.echo)

            self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
            self.base.metadata.create_all(bind=self.engine)
            logger.info(f"✅ Base de données initialisée: {self.engine.url.render_as_string(hide_password=True)}")

        except SQLAlchemyError as e:
            logger.error(f"❌ Erreur initialisation base de données: {e}")
            raise

    def get_session(self) -> Session:
        """Obtient une session de base de données"""
        if self.SessionLocal is None:
            self.initialize()
        return self.SessionLocal()

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Session transactionnelle : commit en fin de bloc, rollback sur erreur"""
        session = self.get_session()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def ping(self) -> bool:
        """Vérifier que la base répond"""
        try:
            with self.get_session() as session:
                session.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.error(f"Base de données injoignable: {e}")
            return False

    def close(self) -> None:
        """Ferme les connexions"""
        if self.engine:
            self.engine.dispose()
            self.engine = None
            self.SessionLocal = None
            logger.info("✅ Connexions base de données fermées")


def ensure_sqlite_directory(database_url: Optional[str]) -> None:
    """Créer le répertoire d'un fichier SQLite si besoin"""
    if not database_url or not database_url.startswith("sqlite:///"):
        return
    db_path = database_url[len("sqlite:///"):]
    if db_path and db_path != ":memory:":
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
