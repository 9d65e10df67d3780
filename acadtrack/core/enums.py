from enum import Enum


class UserRole(str, Enum):
    DIRECTOR = "director"
    HOD = "hod"
    CLASS_TEACHER = "class_teacher"
    FACULTY = "faculty"
    STUDENT = "student"


STAFF_ROLES = (UserRole.FACULTY.value, UserRole.CLASS_TEACHER.value, UserRole.HOD.value)
# roles that may run a class
TEACHING_ROLES = (UserRole.CLASS_TEACHER.value, UserRole.FACULTY.value)


class SubjectType(str, Enum):
    THEORY = "theory"
    PRACTICAL = "practical"
    MDM = "mdm"
    OE = "oe"
    PE = "pe"


class ElectiveCategory(str, Enum):
    """Student-selected subject categories. Values match the request vocabulary."""

    MDM = "MDM"
    OE = "OE"
    PE = "PE"

    @property
    def subject_type(self) -> SubjectType:
        return SubjectType(self.value.lower())


class SubmissionStatus(str, Enum):
    pending = "pending"
    completed = "completed"


class SubmissionTypeName(str, Enum):
    TA = "TA"
    CIE = "CIE"
    DEFAULTER_WORK = "Defaulter work"


class AssignmentSource(str, Enum):
    """Where a faculty/subject/student link was found."""

    DIRECT = "DIRECT"  # faculty_subjects (class or batch assignment)
    OFFERED = "OFFERED"  # department_offered_subjects faculty set
    SELF_SELECTED = "SELF_SELECTED"  # student_subject_selection


class SelectionState(str, Enum):
    UNSET = "UNSET"
    PARTIAL = "PARTIAL"
    COMPLETE = "COMPLETE"
    LOCKED = "LOCKED"
