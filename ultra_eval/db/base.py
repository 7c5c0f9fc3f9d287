# ultra_eval/db/base.py
from sqlalchemy.orm import declarative_base

Base = declarative_base()

from ultra_eval.models.student import Student  # noqa
from ultra_eval.models.report import Report  # noqa
