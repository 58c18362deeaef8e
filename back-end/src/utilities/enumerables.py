from enum import Enum


class UserRole(str, Enum):
    ADMIN = "admin"
    USER = "user"


class UserAccountStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


class SkillLevel(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    EXPERT = "expert"


class TemplateLayout(str, Enum):
    STANDARD = "standard"
    MODERN = "modern"
    CREATIVE = "creative"
    SIMPLE = "simple"
    PROFESSIONAL = "professional"


class TemplateCategory(str, Enum):
    PROFESSIONAL = "professional"
    MINIMALIST = "minimalist"
    SIMPLE = "simple"
    CREATIVE = "creative"
    MODERN = "modern"


class ResumeSection(str, Enum):
    PERSONAL = "personal"
    SUMMARY = "summary"
    EXPERIENCE = "experience"
    EDUCATION = "education"
    SKILLS = "skills"


class SectionPlacement(str, Enum):
    HEADER = "header"
    SIDEBAR = "sidebar"
    MAIN = "main"
