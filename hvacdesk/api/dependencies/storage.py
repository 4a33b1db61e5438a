from functools import lru_cache

from hvacdesk.services.file_services import FileStorage, build_file_storage


@lru_cache
def get_file_storage() -> FileStorage:
  """Storage backend shared by all requests; created on first use."""
  return build_file_storage()
