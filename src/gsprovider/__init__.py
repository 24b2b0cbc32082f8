"""gsprovider - declarative gridscale infrastructure on top of a small REST client."""

from . import resources as resources
from .blueprints import Blueprint as Blueprint
from .client import GridscaleClient as GridscaleClient
from .config import ClientConfig as ClientConfig
from .config import ErrorPolicy as ErrorPolicy
from .config import PollPolicy as PollPolicy
from .context import Context as Context
from .errors import GridscaleError as GridscaleError
from .errors import PollTimeoutError as PollTimeoutError
from .errors import RequestError as RequestError
from .errors import ResourceError as ResourceError
from .errors import ignore_status as ignore_status
from .projects import Project as Project
from .request import Request as Request
from .spec import Specification as Specification
from .spec import resource as resource
from .specop import Absent as Absent
from .specop import Ensure as Ensure
from .specop import Present as Present
from .specop import SpecOp as SpecOp
from .workspace import Workspace as Workspace
