from models.base import Base

from models.user import User
from models.project import Project
from models.contribution import Contribution
from models.content_submission import ContentSubmission, ContentSubmissionFile
from models.notification import Notification, NotificationRecipient
