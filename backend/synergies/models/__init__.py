# Import models here so Alembic can discover metadata.
from synergies.models.user import User  # noqa: F401
from synergies.models.employee import Employee  # noqa: F401

# Referral pipeline
from synergies.models.recommendation import Recommendation  # noqa: F401
from synergies.models.commission import Commission  # noqa: F401
from synergies.models.note import Note  # noqa: F401
from synergies.models.activity import Activity  # noqa: F401
from synergies.models.feature_suggestion import FeatureSuggestion  # noqa: F401
