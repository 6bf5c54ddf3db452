"""CSV importers: student profiles and user role assignments."""

from .student_profiles import parse_student_profile_csv
from .user_roles import parse_user_role_csv

__all__ = [
    "parse_student_profile_csv",
    "parse_user_role_csv",
]
