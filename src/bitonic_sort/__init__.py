from .errors import DeviceError, InvalidInput, ResourceExhausted, SortError
from .orchestrator import BitonicSorter, Dispatch, count_global_merges, plan_dispatches, sort
from .simulator import SimulatedDevice

__version__ = "0.1.0"
