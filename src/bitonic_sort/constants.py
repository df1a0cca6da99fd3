import numpy as np

# element type
ELEMENT_DTYPE = np.int32
ELEMENT_SIZE = np.dtype(ELEMENT_DTYPE).itemsize
ELEMENT_MIN = int(np.iinfo(ELEMENT_DTYPE).min)
ELEMENT_MAX = int(np.iinfo(ELEMENT_DTYPE).max)

# padding slots sort to the end and are dropped on read-back
SENTINEL = ELEMENT_MAX

# kernel entry points
LOCAL_SORT = "local_sort"
GLOBAL_MERGE = "global_merge"

# scheduling group width of the local sort
GROUP_SIZE = 64

# device limits
MAX_BUFFER_BYTES = 1 << 30

# dispatch/barrier events kept by a tracing simulator
TRACE_LENGTH = 4096

# threads per Metal threadgroup (maxTotalThreadsPerThreadgroup)
METAL_THREADGROUP_WIDTH = 1024
