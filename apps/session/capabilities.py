"""
Capabilities checked by the session navigation
"""

UPDATE_SESSION = 'local/session:update'
ACCESS_CONTENTBANK = 'moodle/contentbank:access'
VIEW_PARTICIPANTS = 'moodle/course:viewparticipants'
IMPORT_USERS = 'local/mentor_core:importusers'
VIEW_OUTLINE_REPORT = 'report/outline:view'
VIEW_COMPLETION_REPORT = 'report/completion:view'
VIEW_PROGRESS_REPORT = 'report/progress:view'
MANAGE_GROUPS = 'moodle/course:managegroups'
VIEW_GRADER_REPORT = 'gradereport/grader:view'
VIEW_ALL_GRADES = 'moodle/grade:viewall'
DUPLICATE_SESSION_INTO_TRAINING = 'local/mentor_core:duplicatesessionintotraining'

ALL = [
    UPDATE_SESSION,
    ACCESS_CONTENTBANK,
    VIEW_PARTICIPANTS,
    IMPORT_USERS,
    VIEW_OUTLINE_REPORT,
    VIEW_COMPLETION_REPORT,
    VIEW_PROGRESS_REPORT,
    MANAGE_GROUPS,
    VIEW_GRADER_REPORT,
    VIEW_ALL_GRADES,
    DUPLICATE_SESSION_INTO_TRAINING,
]
