from google.api_core import exceptions as google_exceptions
from tenacity import retry_if_exception, stop_after_attempt, wait_exponential

# API errors worth another try; everything else fails on the first attempt
TRANSIENT_API_ERRORS = (
    google_exceptions.InternalServerError,
    google_exceptions.ServiceUnavailable,
    google_exceptions.TooManyRequests,
)


def is_transient(exc: BaseException) -> bool:
    """True for a translated error whose underlying API error is transient."""
    return isinstance(exc.__cause__, TRANSIENT_API_ERRORS)


# Shared retry configuration for provider reads
# usage: @retry(**RETRY_CONFIG)
RETRY_CONFIG = {
    "stop": stop_after_attempt(3),
    "wait": wait_exponential(multiplier=1, min=4, max=10),
    "retry": retry_if_exception(is_transient),
    "reraise": True,
}

# Zones the driver may deploy into, grouped by area.
# "any" is the union of every area, in catalog order.
ZONE_CATALOG: dict[str, list[str]] = {
    "us": ["us-central1-a", "us-central1-b", "us-central2-a"],
    "europe": ["europe-west1-a"],
}

# Instance names are DNS labels. Base names at or over the threshold are
# cut to threshold - 1 characters before the "-<uuid4>" suffix is added.
MAX_NAME_LENGTH = 63
NAME_TRUNCATE_THRESHOLD = 28

DEFAULT_MACHINE_TYPE = "n1-standard-1"
DEFAULT_NETWORK = "default"
DEFAULT_DISK_SIZE_GB = 10

# Readiness polling: ~5 minutes with the default delay
DEFAULT_READY_ATTEMPTS = 60
DEFAULT_READY_DELAY = 5.0
DEFAULT_SSH_PORT = 22

# Seconds to wait on a zonal insert operation
OPERATION_TIMEOUT = 300

# OAuth scopes requested for the driver's own service account session
COMPUTE_SCOPES = ["https://www.googleapis.com/auth/compute"]

# Public image families and the projects that publish them.
# Bare image names matching none of these resolve to the driver's project.
PUBLIC_IMAGE_PROJECTS = {
    "centos": "centos-cloud",
    "cos": "cos-cloud",
    "debian": "debian-cloud",
    "rhel": "rhel-cloud",
    "rocky-linux": "rocky-linux-cloud",
    "sles": "suse-cloud",
    "ubuntu": "ubuntu-os-cloud",
}
