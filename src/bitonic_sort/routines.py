import numba


@numba.njit(nogil=True)
def compare_and_swap(data, i, j, ascending):
    if (data[i] > data[j]) == ascending:
        data[i], data[j] = data[j], data[i]


@numba.njit(nogil=True)
def local_sort_step(data, offset, lane, j, k, length):
    partner = lane ^ j
    # lanes past the end of the buffer only take part in the barrier
    if offset + lane < length and partner > lane:
        # direction comes from the global index so partitions alternate
        ascending = ((offset + lane) & k) == 0
        compare_and_swap(data, offset + lane, offset + partner, ascending)


@numba.njit(nogil=True)
def local_sort_group(data, offset, group_size, length):
    """
    Bitonic sort of one partition, run the way a scheduling group runs it:
    every lane finishes comparator step (k, j) before any lane starts the next.
    """
    k = 2
    while k <= group_size:
        j = k // 2
        while j > 0:
            for lane in range(group_size):
                local_sort_step(data, offset, lane, j, k, length)
            # group barrier
            j //= 2
        k *= 2


@numba.njit(nogil=True)
def local_sort(data, group_size, length, lanes):
    for offset in range(0, lanes, group_size):
        local_sort_group(data, offset, group_size, length)


@numba.njit(nogil=True)
def global_merge_lane(data, idx, stage, substage, length):
    if idx >= length:
        return
    k = 1 << (stage + 1)
    partner = idx ^ (1 << substage)
    if partner > idx and partner < length:
        compare_and_swap(data, idx, partner, (idx & k) == 0)


@numba.njit(nogil=True)
def global_merge(data, stage, substage, length, lanes):
    for idx in range(lanes):
        global_merge_lane(data, idx, stage, substage, length)
