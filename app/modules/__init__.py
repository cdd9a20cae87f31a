"""Domain modules package."""

from app.modules.audit import models as audit_models  # noqa: F401
from app.modules.identity import models as identity_models  # noqa: F401
from app.modules.lesson_requests import models as lesson_requests_models  # noqa: F401
from app.modules.goals import models as goals_models  # noqa: F401
from app.modules.lessons import models as lessons_models  # noqa: F401
from app.modules.quotes import models as quotes_models  # noqa: F401
from app.modules.teachers import models as teachers_models  # noqa: F401
