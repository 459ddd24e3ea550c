"""Resource client capability and session data model."""

from .client import ControlPlaneDescription as ControlPlaneDescription
from .client import ResourceClient as ResourceClient
from .client import StackDescription as StackDescription
from .client import WorkerGroupDescription as WorkerGroupDescription
from .model import ClusterHandle as ClusterHandle
from .model import ClusterState as ClusterState
from .model import CreatedResource as CreatedResource
from .model import ResourceKind as ResourceKind
from .model import StackOutputs as StackOutputs
