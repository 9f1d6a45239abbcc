from uxray.platform.db.base import Base
from uxray.platform.db.session import sync_engine

# Import models so SQLAlchemy registers them
from uxray.features.scan.models.scan import Scan  # noqa
from uxray.features.scan.models.ux_issue import UXIssue  # noqa
from uxray.features.scan.models.recommendation import Recommendation  # noqa


def init_db(bind=None):
    Base.metadata.create_all(bind=bind or sync_engine)
