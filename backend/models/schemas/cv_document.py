"""The CV document: personal info, experience, education, skills, certifications."""

from pydantic import Field

from models.schemas.base import CamelModel


class PersonalInfo(CamelModel):
    name: str = ""
    title: str = ""
    email: str = ""
    phone: str = ""
    location: str = ""
    summary: str = ""
    linkedin: str = ""
    website: str = ""
    profile_photo: str = ""  # base64 image data


class ExperienceEntry(CamelModel):
    id: str = ""
    title: str = ""
    company: str = ""
    location: str = ""
    start_date: str = ""
    end_date: str = ""
    current: bool = False
    description: str = ""


class EducationEntry(CamelModel):
    id: str = ""
    degree: str = ""
    institution: str = ""
    location: str = ""
    start_date: str = ""
    end_date: str = ""
    current: bool = False
    description: str = ""


class Certification(CamelModel):
    id: str = ""
    name: str = ""
    issuer: str = ""
    date: str = ""
    description: str = ""


class CVDocument(CamelModel):
    """A CV as edited in the builder. Every textual field is optional."""

    personal_info: PersonalInfo = Field(default_factory=PersonalInfo)
    experience: list[ExperienceEntry] = []
    education: list[EducationEntry] = []
    skills: list[str] = []
    certifications: list[Certification] = []
