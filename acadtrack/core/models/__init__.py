from acadtrack.core.models.department import Department
from acadtrack.core.models.class_model import SchoolClass
from acadtrack.core.models.subject import Subject
from acadtrack.core.models.offered_subject import OfferedSubject, OfferedSubjectFaculty
from acadtrack.core.models.subject_assignment import SubjectAssignment
from acadtrack.core.models.batch import Batch
from acadtrack.core.models.student import Student
from acadtrack.core.models.student_selection import StudentSelection
from acadtrack.core.models.submission import Submission, SubmissionType
from acadtrack.core.models.defaulter_submission import DefaulterSubmission
from acadtrack.core.models.faculty_availability import FacultyAvailability

__all__ = [
    "Batch",
    "DefaulterSubmission",
    "Department",
    "FacultyAvailability",
    "OfferedSubject",
    "OfferedSubjectFaculty",
    "SchoolClass",
    "Student",
    "StudentSelection",
    "Subject",
    "SubjectAssignment",
    "Submission",
    "SubmissionType",
]
