"""Built-in gridscale resource types; importing registers them."""

from .k8s import K8sResource as K8sResource
from .k8s import K8sState as K8sState
from .template import TemplateResource as TemplateResource
