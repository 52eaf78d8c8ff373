PHOTOS_KEY = "wedding:photos"
PHOTO_COUNT_KEY = "wedding:photo_count"

MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB
# Headroom for multipart boundaries, part headers and the text fields
MULTIPART_OVERHEAD = 64 * 1024
ALLOWED_MIME_TYPES = ("image/jpeg", "image/jpg", "image/png", "image/webp")
DEFAULT_EVENT_TYPE = "wedding"
DEFAULT_EXTENSION = "jpg"

PHOTO_UPLOAD_SUCCESS = "Photo uploaded successfully!"
PHOTO_DELETE_SUCCESS = "Photo deleted successfully"
PHOTOS_CLEAR_SUCCESS = "All photos cleared successfully"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}

PHOTOS_PATH = "/api/photos"
PHOTOS_METHODS = ("GET", "POST", "DELETE")
