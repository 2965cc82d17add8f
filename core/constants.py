# constants.py

# Store error codes
NOT_FOUND_CODE = "PGRST116"  # single-row select matched no rows
MULTIPLE_ROWS_CODE = "MULTIPLE_ROWS"

# Storage buckets
SUBMISSIONS_BUCKET = "content-submissions"
AVATARS_BUCKET = "user-avatars"

# Content review workflow: current status -> statuses it may move to
SUBMISSION_TRANSITIONS = {
    "pending": ["approved", "rejected"],
    "approved": [],
    "rejected": [],
}

# Headers sent by the stub remote procedures
CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}
