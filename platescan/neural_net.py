"""Feed-forward network evaluated in 16.16 fixed-point arithmetic."""

from __future__ import annotations

import math
import struct
from collections.abc import Sequence
from dataclasses import dataclass
from enum import IntEnum
from itertools import islice

from .hadata import HAData
from .value_buffer import SharedNetValueBuffer

NET_SIGMRES = 1000
NET_SIGMLIM = 12
SIGM_TABLE_SIZE = NET_SIGMRES * NET_SIGMLIM * 2
_SIGM_OFFSET = NET_SIGMRES * NET_SIGMLIM
_DEFAULT_GAIN = 1 << 16


def _i32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - (1 << 32) if value & 0x80000000 else value


def _div_trunc(a: int, b: int) -> int:
    quotient = abs(a) // abs(b)
    return quotient if (a < 0) == (b < 0) else -quotient


def _unpack_i32(raw: bytes) -> list[int]:
    count = len(raw) // 4
    return list(struct.unpack(f"<{count}i", raw[:count * 4]))


class MinMinMaxMode(IntEnum):
    """Character cell layouts understood by calc_min_min_max."""

    MMM10X12 = 1012
    MMM20X12 = 2012
    MMM20X24 = 2024
    MMM16X10 = 1610
    MMM16X18 = 1618
    MMM32X20 = 3220


@dataclass(frozen=True)
class _Regions:
    max_x: tuple[int, int]
    max_y: tuple[int, int]
    min1_x: tuple[int, int]
    min2_x: tuple[int, int]
    min_y: tuple[int, int]
    width: int


_REGIONS = {
    MinMinMaxMode.MMM10X12: _Regions((3, 6), (4, 6), (2, 3), (6, 7), (2, 4), 10),
    MinMinMaxMode.MMM20X12: _Regions((6, 13), (5, 9), (2, 8), (11, 17), (2, 9), 20),
    MinMinMaxMode.MMM20X24: _Regions((6, 13), (8, 13), (4, 7), (12, 15), (4, 7), 20),
    MinMinMaxMode.MMM16X10: _Regions((6, 9), (5, 9), (2, 6), (9, 13), (2, 6), 16),
    MinMinMaxMode.MMM16X18: _Regions((6, 9), (5, 9), (3, 6), (9, 12), (3, 5), 16),
    MinMinMaxMode.MMM32X20: _Regions((11, 20), (10, 19), (5, 11), (20, 26), (2, 10), 32),
}


def _span(bounds: tuple[int, int]) -> range:
    return range(bounds[0], bounds[1] + 1)


def calc_min_min_max(data: Sequence[int], mode: int,
                     scanline: int | None = None) -> tuple[int, int, int]:
    """Darkest value of the two side regions and brightest of the centre region.

    Returns (min1, min2, max); an unknown mode yields (0, 0, 0).
    """
    try:
        regions = _REGIONS[MinMinMaxMode(mode)]
    except ValueError:
        return 0, 0, 0
    if scanline is None:
        scanline = regions.width

    brightest = 0
    for y in _span(regions.max_y):
        row = y * scanline
        brightest = max([brightest, *(data[row + x] for x in _span(regions.max_x))])

    darkest1 = darkest2 = 255
    for y in _span(regions.min_y):
        row = y * scanline
        darkest1 = min([darkest1, *(data[row + x] for x in _span(regions.min1_x))])
        darkest2 = min([darkest2, *(data[row + x] for x in _span(regions.min2_x))])

    return darkest1, darkest2, brightest


class NeuralNet:
    """A striped, sparsely linked network with a tabulated sigmoid."""

    def __init__(self) -> None:
        self.eval_neuron_count = 0
        self.input_neuron_count = 0
        self.output_neuron_count = 0
        self._buffer_offset = 0
        self._value_buffer: SharedNetValueBuffer | None = None
        self._private_buffer = False
        self._stripe: list[int] | None = None
        self._sigm_gain = _DEFAULT_GAIN
        self._sigm_gain_float = 1.0
        self._sigm_table: list[int] | None = None
        self._values: list[int] | None = None
        self._base = 0
        self._using_distributed = False
        self._thresholds: list[int] = []
        self._distributed_result = 0
        self._distributed_fitness = 0x0000FFFF

    @property
    def buffer_offset(self) -> int:
        """Offset of this network's slice in its value buffer."""
        return self._buffer_offset

    @property
    def sigm_gain(self) -> int:
        """Gain of the sigmoid in 16.16 fixed point."""
        return self._sigm_gain

    @property
    def sigm_table(self) -> list[int]:
        """A copy of the tabulated sigmoid."""
        return list(self._sigm_table or [])

    @property
    def values(self) -> list[int]:
        """A copy of the input and neuron values of the network."""
        if self._values is None:
            return []
        count = self.input_neuron_count + self.eval_neuron_count
        return self._values[self._base:self._base + count]

    @property
    def distributed_output_result(self) -> int:
        """The value interpolated from the output neurons."""
        return self._distributed_result

    @property
    def distributed_output_fitness(self) -> int:
        """How clearly one output neuron dominates the others."""
        return self._distributed_fitness

    def set_value_buffer(self, buffer: SharedNetValueBuffer) -> None:
        """Keep neuron values in a buffer shared with other networks."""
        self._value_buffer = buffer
        self._private_buffer = False

    def load_striped(self, data: HAData) -> None:
        """Load the network weights and the sigmoid table from a data node."""
        self._stripe = None
        raw = data.get_raw("netdata")
        if not raw:
            return
        self._stripe = _unpack_i32(raw)

        gain = data.get_int("Sigma gain", _DEFAULT_GAIN)
        table_raw = data.get_raw("Sigma table")
        if table_raw is None:
            self._create_sigm_table(gain)
        else:
            entries = _unpack_i32(table_raw)
            if len(entries) > SIGM_TABLE_SIZE:
                raise ValueError("sigmoid table is too large")
            if self._sigm_table is None:
                self._sigm_table = [0] * SIGM_TABLE_SIZE
            self._sigm_table[:len(entries)] = entries
            self._sigm_gain = gain
            self._sigm_gain_float = gain / 0x10000

        if len(self._stripe) < 3:
            raise ValueError("network data is too short")
        self.eval_neuron_count = self._stripe[0]
        self.input_neuron_count = self._stripe[1]
        self.output_neuron_count = self._stripe[2]

        if self._value_buffer is not None:
            self._buffer_offset = self._value_buffer.reserve(self.eval_neuron_count)
        self._using_distributed = False

    def _create_sigm_table(self, gain: int) -> None:
        self._sigm_gain = gain
        self._sigm_gain_float = gain / 65536.0
        self._sigm_table = [
            self._sigm(i / NET_SIGMRES) >> 8
            for i in range(-_SIGM_OFFSET, _SIGM_OFFSET)
        ]

    def _sigm(self, x: float) -> int:
        exponent = min(max(-self._sigm_gain_float * x, -40.0), 40.0)
        return int(0x10000 * (1.0 / (1.0 + math.exp(exponent))))

    def load_distributed_output(self, data: HAData) -> None:
        """Load the thresholds that map output neurons onto one value."""
        self._thresholds = [0, *(data.get_int(i) for i in range(len(data))), 65535]
        self._using_distributed = True

    def check_values_buffer(self) -> None:
        """Allocate the neuron values on first use."""
        if self._values is not None:
            return
        if self._value_buffer is None:
            self._value_buffer = SharedNetValueBuffer()
            self._private_buffer = True
            self._buffer_offset = self._value_buffer.reserve(
                self.eval_neuron_count + self.input_neuron_count)
            self._values = self._value_buffer.buffer()
            self._base = self._buffer_offset
        else:
            self._values = self._value_buffer.buffer()
            self._base = 0

    def _require_ready(self) -> None:
        if self._stripe is None or self._sigm_table is None:
            raise RuntimeError("network data has not been loaded")
        if self._values is None:
            raise RuntimeError("value buffer is not set up")

    def _set_inputs(self, data: Sequence[int], count: int) -> None:
        pixels = list(islice(data, count))
        if len(pixels) != count:
            raise ValueError("not enough input data")
        self._values[self._base:self._base + count] = [p & 0xFF for p in pixels]

    def _set_extras(self, first: int, second: int, third: int) -> None:
        start = self._base + self.input_neuron_count - 3
        self._values[start:start + 3] = [first, second, third]

    def evaluate_no_avg(self, data: Sequence[int]) -> None:
        """Evaluate with every input taken from data."""
        self._require_ready()
        self._set_inputs(data, self.input_neuron_count)
        self.evaluate_from_buffer()

    def evaluate_append_avg(self, data: Sequence[int], avg: int, avgl: int, avgh: int) -> None:
        """Evaluate with the last three inputs given by the caller."""
        self._require_ready()
        self._set_inputs(data, self.input_neuron_count - 3)
        self._set_extras(avg & 0xFF, avgl & 0xFF, avgh & 0xFF)
        self.evaluate_from_buffer()

    def evaluate_calc_avg(self, data: Sequence[int]) -> None:
        """Evaluate with the mean, low mean and high mean as the last three inputs."""
        self._require_ready()
        count = self.input_neuron_count - 3
        self._set_inputs(data, count)
        pixels = self._values[self._base:self._base + count]
        avg = sum(pixels) // count
        low = [p for p in pixels if p < avg]
        high = [p for p in pixels if p > avg]
        avgl = sum(low) // len(low) if low else avg
        avgh = sum(high) // len(high) if high else avg
        self._set_extras(avg, avgl, avgh)
        self.evaluate_from_buffer()

    def evaluate_min_min_max(self, data: Sequence[int], mode: int) -> None:
        """Evaluate with the min/min/max statistics of a character cell appended."""
        self._require_ready()
        self._set_inputs(data, self.input_neuron_count - 3)
        self._set_extras(*calc_min_min_max(data, mode))
        self.evaluate_from_buffer()

    def evaluate_from_buffer(self) -> None:
        """Propagate the current inputs through every neuron."""
        self._require_ready()
        stripe = self._stripe
        values = self._values
        table = self._sigm_table
        base = self._base
        target = base + self.input_neuron_count
        pos = 3
        for _ in range(self.eval_neuron_count):
            total = stripe[pos]
            stripe_count = stripe[pos + 1]
            pos += 2
            for _ in range(stripe_count):
                links = stripe[pos]
                pos += 1
                if links > 0:
                    start = base + stripe[pos]
                    pos += 1
                    weights = stripe[pos:pos + links]
                    pos += links
                    total += sum(v * w for v, w in zip(values[start:start + links], weights))
                else:
                    for _ in range(-links):
                        total += values[base + stripe[pos]] * stripe[pos + 1]
                        pos += 2
            total = _i32(total) >> 8
            index = (_i32(total * NET_SIGMRES) >> 16) + _SIGM_OFFSET
            index = min(max(index, 0), SIGM_TABLE_SIZE - 1)
            values[target] = table[index]
            target += 1

        if self._using_distributed:
            self._calc_distributed_output()

    def _outputs(self) -> list[int]:
        start = self._base + self.input_neuron_count + self.eval_neuron_count \
            - self.output_neuron_count
        return self._values[start:start + self.output_neuron_count]

    def _calc_distributed_output(self) -> None:
        out = self._outputs()
        count = len(out)
        thr = self._thresholds
        best = max(range(count), key=lambda i: (out[i], -i))

        if best == 0:
            leftv, leftw = 655, out[0]
            rightv, rightw = thr[1], out[1]
        elif best == count - 1:
            leftv, leftw = thr[-2], out[count - 2]
            rightv, rightw = 65535, out[count - 1]
        elif out[best - 1] > out[best + 1]:
            leftv, leftw = thr[best], out[best - 1]
            rightv, rightw = (thr[best] + thr[best + 1]) // 2, out[best]
        else:
            leftv, leftw = (thr[best] + thr[best + 1]) // 2, out[best]
            rightv, rightw = thr[best + 1], out[best + 1]

        leftw >>= 8
        rightw >>= 8
        if leftw + rightw == 0:
            self._distributed_result = 0
        else:
            self._distributed_result = _div_trunc(
                _i32(leftv * leftw + rightv * rightw), leftw + rightw)

        max_weight = out[best]
        if best == 0:
            skip1, skip2, neighbour = 0, 1, out[1]
        elif best == count - 1:
            skip1, skip2, neighbour = count - 1, count - 2, out[count - 2]
        elif out[best - 1] > out[best + 1]:
            skip1, skip2, neighbour = best - 1, best, out[best - 1]
        else:
            skip1, skip2, neighbour = best, best + 1, out[best + 1]

        output_sum = 0
        for index, value in enumerate(out):
            if index < skip1:
                output_sum += value * (skip1 - index + 1)
            elif index > skip2:
                output_sum += value * (index - skip2 + 1)
        output_sum = _i32(output_sum)

        fitness_base = _i32(max_weight + _div_trunc(neighbour, 2))
        fitness_div = _i32(output_sum + fitness_base)
        if fitness_div == 0:
            fitness = 0
        else:
            fitness = _div_trunc(_i32(fitness_base << 8), fitness_div >> 8)
        self._distributed_fitness = _i32((fitness >> 8) * ((65536 + fitness_base) >> 10))

    def output_value(self, accumulated: bool = True, index: int = 0) -> int:
        """The distributed result, or the value of one output neuron in 16.16."""
        if self._using_distributed and accumulated:
            return self._distributed_result
        if self._values is None:
            raise RuntimeError("value buffer is not set up")
        position = self._base + self.input_neuron_count + self.eval_neuron_count \
            - self.output_neuron_count + index
        return _i32(self._values[position] << 8)

    def distributed_output(self, size: int) -> list[int]:
        """The output neuron values in 16.16, padded with -1 to size entries."""
        result: list[int] = []
        if self._using_distributed:
            result = [_i32(v << 8) for v in self._outputs()[:size]]
        return result + [-1] * (size - len(result))