from db.models.pull_requests import *  # noqa: F401,F403
from db.models.teams import *  # noqa: F401,F403
