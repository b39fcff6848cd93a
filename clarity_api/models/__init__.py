"""
ORM models. Importing this package registers every table on Base.metadata.
"""

from clarity_api.models.profile import Profile
from clarity_api.models.project import Project
from clarity_api.models.membership import ProjectMember
from clarity_api.models.label import Label
from clarity_api.models.image import Image
from clarity_api.models.annotation import Annotation

__all__ = ["Profile", "Project", "ProjectMember", "Label", "Image", "Annotation"]
