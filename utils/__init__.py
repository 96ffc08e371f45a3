from .hf_client import HFClient, get_hf_client
from .run_utils import RunManager

__all__ = ["HFClient", "get_hf_client", "RunManager"]
