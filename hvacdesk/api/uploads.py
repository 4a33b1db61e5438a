from typing import List, Optional

from fastapi import UploadFile

from hvacdesk.core.config import settings
from hvacdesk.schemas.report import PhotoUpload


def read_photo_uploads(files: Optional[List[UploadFile]]) -> List[PhotoUpload]:
	"""Read multipart files into PhotoUpload models.

	Parts without a filename (empty file inputs) are skipped. At most one
	byte past the size limit is read so oversize files are still rejected
	by the file service without buffering them whole.
	"""
	limit = settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024
	uploads: List[PhotoUpload] = []
	for f in files or []:
		if not f.filename:
			continue
		data = f.file.read(limit + 1)
		uploads.append(PhotoUpload(filename=f.filename, content_type=f.content_type, data=data))
	return uploads
