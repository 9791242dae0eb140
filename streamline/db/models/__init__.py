# streamline/db/models/__init__.py
from .user import User
from .auth_session import AuthSession
from .organization import Organization, Member, Invitation, MemberRole, InvitationStatus
from .board import Project, Task, TaskStatus, TaskPriority, Label, TaskLabel, TaskAssignee, Comment
