# Namespace for pipeline steps
from .load_cached_profile import LoadCachedProfile  # noqa: F401
from .extract_profile import ExtractProfile  # noqa: F401
from .cache_profile import CacheProfile  # noqa: F401
