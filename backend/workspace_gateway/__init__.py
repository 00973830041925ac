"""Service-account access to Google Drive and Sheets behind a small FastAPI app."""
