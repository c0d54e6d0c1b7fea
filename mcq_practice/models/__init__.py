# Importing the models registers their tables on Base.metadata
from mcq_practice.models.user import User  # noqa
from mcq_practice.models.topic import Topic  # noqa
from mcq_practice.models.question import Question  # noqa
from mcq_practice.models.practice_session import PracticeSession, SessionQuestion  # noqa
from mcq_practice.models.backup import BackupFile  # noqa
from mcq_practice.models.password_reset import PasswordResetToken  # noqa
