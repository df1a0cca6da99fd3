import numpy as np

from .constants import ELEMENT_DTYPE, GLOBAL_MERGE, LOCAL_SORT, MAX_BUFFER_BYTES, METAL_THREADGROUP_WIDTH
from .device import Device
from .errors import DeviceError
from .utils import logger, timed

source = """
#include <metal_stdlib>
using namespace metal;

struct SortParams {
    uint stage;
    uint substage;
    uint length;
    uint group_size;
};

inline void compare_and_swap(device int *data, uint i, uint j, bool ascending)
{
    int a = data[i];
    int b = data[j];
    if ((a > b) == ascending) {
        data[i] = b;
        data[j] = a;
    }
}

kernel void local_sort(device int              *data   [[buffer(0)]],
                       constant SortParams     &params [[buffer(1)]],
                       uint                     id     [[thread_position_in_grid]])
{
    uint lane   = id % params.group_size;
    uint offset = id - lane;
    /* the grid is padded to whole threadgroups */
    bool active = id < params.length;

    for (uint k = 2u; k <= params.group_size; k <<= 1) {
        for (uint j = k >> 1; j > 0u; j >>= 1) {
            uint partner = lane ^ j;
            if (active && partner > lane) {
                /* global index, so neighbouring partitions alternate direction */
                compare_and_swap(data, offset + lane, offset + partner, (id & k) == 0u);
            }
            threadgroup_barrier(mem_flags::mem_device);
        }
    }
}

kernel void global_merge(device int              *data   [[buffer(0)]],
                         constant SortParams     &params [[buffer(1)]],
                         uint                     id     [[thread_position_in_grid]])
{
    uint blockWidth = 1u << (params.stage + 1u);
    uint partner    = id ^ (1u << params.substage);

    if (id < params.length && partner > id && partner < params.length) {
        compare_and_swap(data, id, partner, (id & blockWidth) == 0u);
    }
}
"""


class MetalDevice(Device):
    """
    Apple GPU device through metalcompute.

    Every kernel call returns a run handle; dropping the handle waits for the
    run to complete, so the barrier is releasing every pending handle.

    metalcompute launches whole threadgroups of the pipeline's maximum width,
    so the grid is padded past the buffer and both kernels leave lanes with
    id >= length idle. A local-sort partition must fit in one threadgroup; wider
    partitions are rejected.
    """

    name = "metal"

    def __init__(self, max_buffer_bytes=MAX_BUFFER_BYTES, threadgroup_width=METAL_THREADGROUP_WIDTH):
        super().__init__(max_buffer_bytes, threadgroup_width)
        import metalcompute as mc
        self.mc = mc
        self.device = mc.Device()
        library = self.device.kernel(source)
        self.functions = {
            LOCAL_SORT: library.function(LOCAL_SORT),
            GLOBAL_MERGE: library.function(GLOBAL_MERGE),
        }
        self.pending = []

    def allocate(self, length):
        requested = self.check_allocation(length)
        return self.device.buffer(requested)

    @timed
    def upload(self, buffer, array):
        np.frombuffer(buffer, dtype=ELEMENT_DTYPE)[:] = np.asarray(array, dtype=ELEMENT_DTYPE)

    def dispatch(self, kernel, buffer, groups, group_size, params):
        fn = self.functions.get(kernel)
        if fn is None:
            raise DeviceError(f"no compute entry point named {kernel!r}")
        self.check_group_size(group_size)
        logger.debug("dispatch %s groups=%d group_size=%d params=%s", kernel, groups, group_size, params)
        self.pending.append(fn(groups * group_size, buffer, np.array([params])))

    def barrier(self):
        while self.pending:
            _ = self.pending.pop(0)
            del _
        logger.debug("barrier")

    @timed
    def download(self, buffer):
        self.barrier()
        return np.frombuffer(buffer, dtype=ELEMENT_DTYPE).copy()

    def release(self, buffer):
        self.barrier()
        self.mc.release(buffer)

    def __del__(self):
        mc = getattr(self, "mc", None)
        if mc is None:
            return
        for fn in self.functions.values():
            mc.release(fn)
        mc.release(self.device)
