from abc import ABC, abstractmethod
from contextlib import contextmanager

from .constants import ELEMENT_SIZE, MAX_BUFFER_BYTES
from .errors import DeviceError, ResourceExhausted


class Device(ABC):
    """
    Compute capability the sort is driven through.

    A device owns buffers of int32 elements, runs the `local_sort` and
    `global_merge` entry points over groups of lanes, and guarantees that
    everything dispatched before `barrier()` has finished and is visible
    before anything dispatched after it reads the buffer.

    A device with a threadgroup_width launches whole threadgroups of that
    many lanes, and a partition of the local sort must fit in one of them.
    """

    name = "device"

    def __init__(self, max_buffer_bytes=MAX_BUFFER_BYTES, threadgroup_width=None):
        self.max_buffer_bytes = max_buffer_bytes
        self.threadgroup_width = threadgroup_width

    def check_allocation(self, length):
        requested = length * ELEMENT_SIZE
        if self.max_buffer_bytes is not None and requested > self.max_buffer_bytes:
            raise ResourceExhausted(requested, self.max_buffer_bytes)
        return requested

    def check_group_size(self, group_size):
        if self.threadgroup_width is not None and group_size > self.threadgroup_width:
            raise DeviceError(
                f"partitions of {group_size} lanes do not fit in a threadgroup of {self.threadgroup_width}"
            )

    def grid_lanes(self, lanes):
        width = self.threadgroup_width or 1
        return -(-lanes // width) * width

    @abstractmethod
    def allocate(self, length):
        ...

    @abstractmethod
    def upload(self, buffer, array):
        ...

    @abstractmethod
    def dispatch(self, kernel, buffer, groups, group_size, params):
        ...

    @abstractmethod
    def barrier(self):
        ...

    @abstractmethod
    def download(self, buffer):
        ...

    @abstractmethod
    def release(self, buffer):
        ...

    @contextmanager
    def buffer(self, length):
        buf = self.allocate(length)
        try:
            yield buf
        finally:
            self.release(buf)

    def __repr__(self):
        return f"{type(self).__name__}(max_buffer_bytes={self.max_buffer_bytes}, threadgroup_width={self.threadgroup_width})"
