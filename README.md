# pointbricks

pointbricks turns point clouds into hierarchical scene graphs suited to
level-of-detail rendering, and saves them as JSON files.

Points are quantised to a fixed precision and sorted into cubic *bricks*.
Each brick holds its points as offsets within the brick, packed for 8, 10 or
16 bits per coordinate. Coarser levels are built by merging eight
neighbouring bricks into one and keeping every fourth point. The result is a
flat scene, a single LOD hierarchy, or a paged LOD hierarchy in which each
tile's high resolution children are saved to a file of their own.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Modules

* `pointbricks.settings`: `Settings` (precision, bits, point size,
  transition, `create_type`, output `path` and `extension`, offset and
  bound), the `CreateType` enum (`FLAT`, `LOD`, `PAGEDLOD`) and the `Box`
  bounding box.
* `pointbricks.bricks`: `Key`, `PackedPoint`, `Brick` and `Bricks`, a
  mapping from `Key` to `Brick` iterated in key order. `Bricks.add(v, c)`
  quantises a point and its RGBA colour into its brick; `Bricks.count()`
  returns the total number of points.
* `pointbricks.readers`: `read_ascii_points`, `read_bin` and `read_points`.
* `pointbricks.create`: `create_scene_graph`, `generate_level`,
  `create_state_group`, `subtile` and `create_paged_lod`.
* `pointbricks.scenegraph`: the node classes (`Group`, `StateGroup`,
  `MatrixTransform`, `CullGroup`, `LOD`, `PagedLOD`, `VertexDraw`) and
  `write_node`, `read_node` and `node_from_dict` for JSON storage.
* `pointbricks.shaderset`: descriptions of the point shader sets
  (`create_points_flat_shaded_shader_set`, `create_points_phong_shader_set`)
  and `create_particle_image`, the RGBA sprite used for each point.

## Reading points

Two input formats are supported:

* `.asc` / `.3dc` text files: one point per line, with values separated by
  whitespace, commas or semicolons. The first six values are taken as
  `x y z r g b`; lines with fewer are skipped. Alpha is set to 255.
* `.bin` binary files: packed records of three little-endian doubles
  followed by three colour bytes, read `num_points_per_block` records at a
  time.

```python
from pointbricks.settings import Settings
from pointbricks.readers import read_points

settings = Settings(precision=0.001, bits=10)
bricks = read_points("cloud.asc", settings)
print(bricks.count(), "points in", len(bricks), "bricks")
```

The readers return `None` for a file whose extension they do not handle and
for a file with no points in it. A missing file raises `FileNotFoundError`,
and a `bits` value other than 8, 10 or 16 raises `UnsupportedBitsError`.

## Building a scene graph

```python
from pointbricks.create import create_scene_graph
from pointbricks.scenegraph import write_node
from pointbricks.settings import CreateType

settings.create_type = CreateType.LOD
scene = create_scene_graph(bricks, settings)
write_node(scene, "cloud.json")
```

`CreateType.FLAT` produces a culled, translated state group holding one draw
per brick. `CreateType.LOD` builds the level hierarchy in memory.
`CreateType.PAGEDLOD` builds the same hierarchy but writes each tile's finer
children to `settings.path/<w>/<z>/<y>/<x><settings.extension>` and refers to
them by file name. `create_scene_graph` returns `None` for empty bricks and
updates `settings.offset` as it places the scene.

Saved scenes can be loaded again with `read_node`.

## Command line

```
pointbricks cloud.asc -o out/cloud.json
```

Arguments are point files (`.bin`, `.asc`, `.3dc`) or scene graph files
written earlier; every scene built or loaded is combined into one output.

Options:

* `-b N` points per block when reading binary files
* `-p PRECISION` quantisation precision
* `-t TRANSITION` LOD transition screen ratio
* `--ps SIZE` point size
* `--bits 8|10|16` bits per packed coordinate
* `--plod`, `--lod`, `--flat` choose the kind of scene graph (LOD by default)
* `--no-model` leave loaded scene graph files out of the output
* `-o FILE` write the scene graph to `FILE`; paged LOD tiles go into a
  directory named after `FILE` without its extension
* `-v`, `--viewer` after writing, also print a summary of the scene

The command reports how many points were read and how long reading and scene
creation took. Without `-o`, or with `-v`, it prints how many point draws and
points the scene holds. It exits with status 1 when nothing could be loaded
or when `--plod` is given without `-o`.

## What it does not do

pointbricks does not render anything: there is no viewer window, camera or
GPU pipeline. The shader sets and state groups it produces are plain
descriptions stored in the JSON scene files. It reads only the point formats
listed above and cannot convert meshes into points.