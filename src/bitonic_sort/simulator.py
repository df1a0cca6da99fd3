from collections import deque
from itertools import count
import threading

import numpy as np

from . import routines
from .constants import ELEMENT_DTYPE, GLOBAL_MERGE, LOCAL_SORT, MAX_BUFFER_BYTES, TRACE_LENGTH
from .device import Device
from .errors import DeviceError, ResourceExhausted
from .utils import logger


class SimulatedBuffer:
    def __init__(self, handle, data):
        self.handle = handle
        self.data = data
        self.pending = 0

    @property
    def length(self):
        return self.data.shape[0]

    def __repr__(self):
        return f"SimulatedBuffer({self.handle}, length={self.length})"


class SimulatedDevice(Device):
    """
    In-process reference device.

    Dispatches are queued and only run when a barrier drains the queue, in
    issue order, one comparator step at a time. With strict_barriers set, a
    dispatch or download against a buffer that still has queued work raises
    DeviceError instead of being silently ordered.

    With a threadgroup_width, kernels run over the grid padded to whole
    threadgroups, the way a GPU launches them. With trace set, the last
    trace_length dispatches and barriers are kept in `events`.
    """

    name = "simulator"
    kernels = {
        LOCAL_SORT: "run_local_sort",
        GLOBAL_MERGE: "run_global_merge",
    }

    def __init__(self, max_buffer_bytes=MAX_BUFFER_BYTES, strict_barriers=False,
                 threadgroup_width=None, trace=False, trace_length=TRACE_LENGTH):
        super().__init__(max_buffer_bytes, threadgroup_width)
        self.strict_barriers = strict_barriers
        self.lock = threading.RLock()
        self.handles = count()
        self.buffers = {}
        self.queue = []
        self.events = deque(maxlen=trace_length) if trace else None

    @property
    def live_buffers(self):
        return len(self.buffers)

    def lookup(self, buffer):
        live = self.buffers.get(buffer.handle)
        if live is not buffer:
            raise DeviceError(f"{buffer!r} is not allocated on this device")
        return live

    def allocate(self, length):
        requested = self.check_allocation(length)
        try:
            data = np.empty(length, dtype=ELEMENT_DTYPE)
        except MemoryError:
            raise ResourceExhausted(requested)
        with self.lock:
            buffer = SimulatedBuffer(next(self.handles), data)
            self.buffers[buffer.handle] = buffer
        logger.debug("allocate %r", buffer)
        return buffer

    def upload(self, buffer, array):
        with self.lock:
            buffer = self.lookup(buffer)
            array = np.asarray(array, dtype=ELEMENT_DTYPE)
            if array.shape != buffer.data.shape:
                raise DeviceError(f"upload of {array.shape[0]} elements into {buffer!r}")
            buffer.data[:] = array

    def dispatch(self, kernel, buffer, groups, group_size, params):
        if kernel not in self.kernels:
            raise DeviceError(f"no compute entry point named {kernel!r}")
        self.check_group_size(group_size)
        with self.lock:
            buffer = self.lookup(buffer)
            if groups * group_size != buffer.length:
                raise DeviceError(
                    f"{kernel} over {groups}x{group_size} lanes does not cover {buffer!r}"
                )
            if self.strict_barriers and buffer.pending:
                raise DeviceError(f"{kernel} reads {buffer!r} before a barrier")
            buffer.pending += 1
            self.queue.append((kernel, buffer, group_size, params))
            if self.events is not None:
                self.events.append(("dispatch", kernel, int(params['stage']), int(params['substage'])))
        logger.debug("dispatch %s groups=%d group_size=%d params=%s", kernel, groups, group_size, params)

    def barrier(self):
        with self.lock:
            while self.queue:
                kernel, buffer, group_size, params = self.queue.pop(0)
                getattr(self, self.kernels[kernel])(buffer.data, group_size, params)
                buffer.pending -= 1
            if self.events is not None:
                self.events.append(("barrier",))
        logger.debug("barrier")

    def run_local_sort(self, data, group_size, params):
        routines.local_sort(data, group_size, data.shape[0], self.grid_lanes(data.shape[0]))

    def run_global_merge(self, data, group_size, params):
        routines.global_merge(
            data,
            int(params['stage']),
            int(params['substage']),
            int(params['length']),
            self.grid_lanes(data.shape[0]),
        )

    def download(self, buffer):
        with self.lock:
            buffer = self.lookup(buffer)
            if buffer.pending:
                if self.strict_barriers:
                    raise DeviceError(f"download of {buffer!r} before a barrier")
                self.barrier()
            return buffer.data.copy()

    def release(self, buffer):
        with self.lock:
            buffer = self.lookup(buffer)
            # queued work on a released buffer is discarded
            self.queue = [item for item in self.queue if item[1] is not buffer]
            del self.buffers[buffer.handle]
        logger.debug("release %r", buffer)
