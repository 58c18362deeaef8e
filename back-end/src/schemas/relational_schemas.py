from schemas.profile import ProfilePublic
from schemas.resume import ResumePublic
from schemas.template import TemplatePublic
from schemas.user import UserPublic


class RelationalUserPublic(UserPublic):
    profile: ProfilePublic | None = None


class RelationalResumePublic(ResumePublic):
    template: TemplatePublic | None = None
