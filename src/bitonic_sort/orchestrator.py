from collections import namedtuple

import numpy as np

from .constants import (
    ELEMENT_DTYPE,
    ELEMENT_MAX,
    ELEMENT_MIN,
    GLOBAL_MERGE,
    GROUP_SIZE,
    LOCAL_SORT,
    SENTINEL,
)
from .errors import DeviceError, InvalidInput, ResourceExhausted, SortError
from .simulator import SimulatedDevice
from .struct_types import make_params
from .utils import is_power_of_two, log2, next_power_of_two, timed

Dispatch = namedtuple("Dispatch", ["kernel", "groups", "group_size", "stage", "substage"])


def effective_group_size(length, group_size=GROUP_SIZE):
    return min(group_size, length)


def plan_dispatches(length, group_size=GROUP_SIZE):
    """
    Ordered kernel invocations that sort a working buffer of `length`
    elements (a power of two). A barrier belongs after every entry.
    """
    if not is_power_of_two(length):
        raise ValueError(f"working length must be a power of two, got {length}")
    group_size = effective_group_size(length, group_size)
    groups = length // group_size

    plan = [Dispatch(LOCAL_SORT, groups, group_size, None, None)]
    for stage in range(log2(group_size), log2(length)):
        for substage in range(stage, -1, -1):
            plan.append(Dispatch(GLOBAL_MERGE, groups, group_size, stage, substage))
    return plan


def count_global_merges(length, group_size=GROUP_SIZE):
    group_bits = log2(effective_group_size(length, group_size))
    return sum(stage + 1 for stage in range(group_bits, log2(length)))


def as_element_array(host_array):
    try:
        array = np.asarray(host_array)
    except (TypeError, ValueError) as error:
        raise InvalidInput(f"cannot read input as an array: {error}") from error
    if array.ndim != 1:
        raise InvalidInput(f"expected a one-dimensional sequence, got shape {array.shape}")
    if array.size == 0:
        return np.empty(0, dtype=ELEMENT_DTYPE)
    if array.dtype == object and all(isinstance(v, int) and not isinstance(v, bool) for v in array):
        # integers too wide for int64
        raise InvalidInput("values do not fit in a signed 32-bit integer")
    if array.dtype.kind not in "iu":
        raise InvalidInput(f"expected integers, got {array.dtype}")
    if array.min() < ELEMENT_MIN or array.max() > ELEMENT_MAX:
        raise InvalidInput("values do not fit in a signed 32-bit integer")
    return array.astype(ELEMENT_DTYPE)


def pad(array, length):
    padded = np.full(length, SENTINEL, dtype=ELEMENT_DTYPE)
    padded[:array.shape[0]] = array
    return padded


class BitonicSorter:
    def __init__(self, device, group_size=GROUP_SIZE):
        if not is_power_of_two(group_size):
            raise ValueError(f"group size must be a power of two, got {group_size}")
        try:
            device.check_group_size(group_size)
        except DeviceError as error:
            raise ValueError(str(error)) from error
        self.device = device
        self.group_size = group_size

    def plan(self, n):
        return plan_dispatches(next_power_of_two(n), self.group_size)

    @timed
    def sort(self, host_array):
        array = as_element_array(host_array)
        n = array.shape[0]
        if n == 0:
            return array

        length = next_power_of_two(n)
        try:
            with self.device.buffer(length) as buffer:
                self.device.upload(buffer, pad(array, length))
                self.run(buffer, length)
                result = self.device.download(buffer)
        except SortError:
            raise
        except MemoryError as error:
            raise ResourceExhausted(length * array.itemsize) from error
        except Exception as error:
            raise DeviceError(f"sort of {n} elements failed on {self.device.name}", error) from error
        return result[:n]

    def run(self, buffer, length):
        for dispatch in plan_dispatches(length, self.group_size):
            params = make_params(
                length,
                dispatch.group_size,
                stage=dispatch.stage or 0,
                substage=dispatch.substage or 0,
            )
            self.device.dispatch(dispatch.kernel, buffer, dispatch.groups, dispatch.group_size, params)
            self.device.barrier()

    def __repr__(self):
        return f"BitonicSorter({self.device!r}, group_size={self.group_size})"


def sort(host_array, device=None, group_size=GROUP_SIZE):
    if device is None:
        device = SimulatedDevice()
    return BitonicSorter(device, group_size).sort(host_array)
