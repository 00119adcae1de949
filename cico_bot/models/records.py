# cico_bot/models/records.py
"""
Portal value types.

Field aliases match the portal's JSON keys so API payloads validate directly.
"""

from pydantic import BaseModel, ConfigDict, Field


class AttendanceRecord(BaseModel):
    """One check-in/check-out entry. Immutable once parsed."""

    model_config = ConfigDict(
        frozen=True, extra="ignore", populate_by_name=True, coerce_numbers_to_str=True
    )

    date: str | None = Field(default=None, alias="checkInDate")
    check_in_time: str | None = Field(default=None, alias="checkInTime")
    check_out_time: str | None = Field(default=None, alias="checkOutTime")
    working_hour_seconds: float | None = Field(default=None, alias="workingHour")
    work_report: str | None = Field(default=None, alias="workReport")
    check_in_image: str | None = Field(default=None, alias="checkInImage")
    check_out_image: str | None = Field(default=None, alias="checkOutImage")


class CourseInfo(BaseModel):
    """Nested course block of the student profile."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True, coerce_numbers_to_str=True)

    course_fees: str | None = Field(default=None, alias="courseFees")


class StudentProfile(BaseModel):
    """Current student as returned by the portal."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True, coerce_numbers_to_str=True)

    user_id: str | None = Field(default=None, alias="userId")
    full_name: str | None = Field(default=None, alias="fullName")
    email: str | None = None
    mobile: str | None = None
    dob: str | None = None
    current_course: str | None = Field(default=None, alias="currentCourse")
    applied_course: str | None = Field(default=None, alias="applyForCourse")
    course: CourseInfo | None = Field(default=None, alias="courseResponse")
    join_date: str | None = Field(default=None, alias="joinDate")
    active: bool = False
    profile_pic: str | None = Field(default=None, alias="profilePic")
