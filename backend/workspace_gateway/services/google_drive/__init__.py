from .models import DRIVE_FOLDER_MIME_TYPE, DriveFile, DriveFolder, DriveItem
from .resolver import DriveResourceResolver
from .uploader import MULTIPART_BOUNDARY, DriveUploader, MultipartBody, build_multipart_body

__all__ = [
    "DRIVE_FOLDER_MIME_TYPE",
    "DriveFile",
    "DriveFolder",
    "DriveItem",
    "DriveResourceResolver",
    "DriveUploader",
    "MULTIPART_BOUNDARY",
    "MultipartBody",
    "build_multipart_body",
]
