# platescan

Pure-Python building blocks for automatic number plate recognition. The package
has no third-party dependencies.

## Modules

- `platescan.geometry`: the frozen dataclasses `PointFixed` (16.16 fixed-point
  coordinates) and `PointFloat`, with `to_fixed` and `from_fixed` for converting
  numbers to and from 16.16 fixed point.
- `platescan.netimage`: `NetImage`, an 8-bit grey image with a row stride.
  `create` makes an owned image, `create_map` wraps a caller's buffer without
  copying, and `fill`, `free`, `offset`, `row` and `pixel` give access to it.
- `platescan.mipmapper`: `MipMapper` builds half-resolution copies of a source
  image on demand, each pixel the mean of a 2x2 block. `full_mipmap(level)`
  returns one level (0 is the source). `get_mipmap` picks the coarsest level on
  which the step vectors are no longer than a limit and returns a
  `MipMapResult` with the image, the scaled coordinates, the vector length and
  the level.
- `platescan.polygon`: `draw_polygon(image, points)` clears a `NetImage` and
  paints the polygon given by `(x, y)` vertices with 255.
- `platescan.value_buffer`: `SharedNetValueBuffer`, one lazily allocated list of
  values that several networks reserve slices of.
- `platescan.minimal_data`: `MinimalData`, an ordered container of named,
  typed values (bool, 32-bit int, float, string, bytes, nested nodes), with the
  kinds listed in `MinimalDataType`.
- `platescan.serializer`: `loads(payload)` and `deserialize(target, payload)`
  read the binary tree format of the recognition data files; malformed input
  raises `DeserializeError`.
- `platescan.hadata`: `HADataManager` loads a data file (`load_file` or
  `load_bytes`) and exposes its `root` as an `HAData` view with `get_int`,
  `get_float`, `get_raw`, `get_node` and `len()`.
- `platescan.neural_net`: `NeuralNet`, a sparsely linked feed-forward network
  evaluated in 16.16 fixed point with a tabulated sigmoid and optional
  distributed outputs, plus `calc_min_min_max` and the `MinMinMaxMode` cell
  layouts.
- `platescan.tracker`: `PlateTracker` follows `PlateReading`s across frames and
  emits `TrackEvent`s of the kinds in `TrackEventType`.
- `platescan.runtime_config`: a process-wide key/value store with `get_value`,
  `set_value` and `clear`. `get_value` returns `None` for an unknown key.

## Installing

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Loading a data file

```python
from platescan.hadata import HADataManager

manager = HADataManager()
manager.load_file("lpr.lprdat")
node = manager.root.get_node("charnet")
if node is not None:
    weights = node.get_raw("netdata")
```

## Running a network

```python
from platescan.neural_net import NeuralNet

net = NeuralNet()
net.load_striped(node)
net.check_values_buffer()
net.evaluate_no_avg(pixels)
score = net.output_value()
```

`load_striped` reads the `netdata` weights and either the `Sigma table` block or
a table built from `Sigma gain`. After `load_distributed_output`, `output_value()`
returns the value interpolated across the output neurons, and
`distributed_output(size)` lists the individual outputs.

## Tracking plates

```python
from platescan.geometry import PointFloat
from platescan.tracker import PlateReading, PlateTracker

tracker = PlateTracker()
tracker.set_event_resend(True, 1000, 3)

reading = PlateReading(
    text="TEST01",
    x=320,
    y=240,
    char_height=24.0,
    frame=(PointFloat(280, 228), PointFloat(360, 228),
           PointFloat(360, 252), PointFloat(280, 252)),
)
for event in tracker.track_plates(0, [reading]):
    print(event.type.name, event.guess, event.track_id)
```

`track_plates` takes a timestamp in milliseconds and the readings of one frame,
and returns the events of that frame (also kept in `tracker.events`). Tracks not
updated for 6000 ms end.

## Masks and mipmaps

```python
from platescan.netimage import NetImage
from platescan.polygon import draw_polygon
from platescan.mipmapper import MipMapper

mask = NetImage()
mask.create(64, 48)
draw_polygon(mask, [(5, 5), (50, 8), (45, 40), (8, 35)])

mipmapper = MipMapper()
mipmapper.set_source(mask)
half = mipmapper.full_mipmap(1)
```

## What this package does not do

It does not find or read plates in an image: there is no plate locator or
character reader, so the `PlateReading`s given to the tracker must come from
elsewhere. It does not load image or video files, has no user interface and
installs no command-line tool.