# microceph

Building blocks for managing a small Ceph cluster from Python.

## What is in the package

- **`microceph.constants`** holds the shared constants, such as
  `MIN_OSD_SIZE`, `CLIENT_CONFIG_GLOBAL_HOST` (`"*"`) and `BOOTSTRAP_PORT`.
  - `get_path_const()` returns a `PathConst`. Its configuration, run, data,
    log, root and proc paths are built from the `SNAP_DATA`, `SNAP_COMMON`
    and `TEST_ROOT_PATH` environment variables.
  - `get_path_file_mode()` maps the conf, run, data and log directories to
    the permission bits each should have.
- **`microceph.version`** provides `version()`, which returns the version
  string set at build time. It is empty unless the build sets one.
- **`microceph.common`** holds the host helpers:
  - `network.Network` has `find_ip_on_subnet`, `find_network_address` and
    `is_ip_on_subnet`. It reads the host's interfaces through `psutil`.
    A ready-made instance is available as `network.network`.
  - `storage.is_mounted` and `storage.is_ceph_device` check block devices.
  - `fileutils.filter_files_in_dir` and `fileutils.get_file_age` help with
    files on disk.
  - `sets.Set` is a dict used as a set of keys. It has `keys()` and
    `is_in(superset)`.
  - `bootstrap.BootstrapConfig` holds the bootstrap parameters.
    `encode_bootstrap_config` and `decode_bootstrap_config` convert it to a
    string map and back.
- **`microceph.database`** is the SQLite cluster store:
  - `core` has `Database`, `State`, `CephState`, and the errors
    `StatusError`, `NotFoundError` and `ConflictError`.
  - `schema` holds the schema extensions and `apply_schema_extensions`.
  - `config`, `disk`, `service`, `remote` and `client_config` provide get,
    create, update and delete functions for each table.
  - `osd` provides `MemberCounter` and `OSDQuery`. Ready-made instances are
    available as `member_counter` and `osd_query`.
  - `remote` also provides `persist_remote_db`, `get_remote_db` and
    `delete_remote_db`. `delete_remote_db` also removes
    `<name>.conf` and `<name>.keyring` from the configuration directory.
  - `client_config_query` provides `ClientConfigQuery`,
    `squash_client_configs` and `client_config_slice`.

## Installation

```
pip install .
```

## Usage

### Opening a database

```python
from microceph.database.core import Database, State

db = Database("cluster.db")
state = State(name="node1", database=db)
```

Opening a database has two effects. If no cluster members table exists, it
creates `core_cluster_members`. It then applies any schema extensions that
have not yet been applied, and records the schema version in SQLite's
`user_version`.

`db.transaction()` is a context manager that yields the connection. It
commits when the block succeeds and rolls back when an exception is raised.

The package has no function for adding cluster members. Insert them
directly:

```python
with db.transaction() as conn:
    conn.execute("INSERT INTO core_cluster_members (name) VALUES (?)", ("node1",))
```

### Recording disks and services

```python
from microceph.database.disk import Disk, create_disk, get_disks
from microceph.database.service import Service, create_service

with db.transaction() as conn:
    create_disk(conn, Disk(member="node1", path="/dev/sdb"))
    create_service(conn, Service(member="node1", service="mon"))
    print(get_disks(conn))
```

A disk's `id` is its OSD number.

Errors are raised as follows:

- Looking up a row that does not exist raises `NotFoundError`.
- Creating a row that already exists raises `ConflictError`.
- Passing an empty filter to a `get_*s` function raises `ValueError`.

### Client configuration

A value can be set for every host (host `"*"`) or for one member. For one
host, `get_all_for_host` returns that host's own values laid over the
cluster-wide ones:

```python
from microceph.database.client_config_query import ClientConfigQuery

query = ClientConfigQuery()
query.add_new(state, "rbd_cache", "true", "*")
query.add_new(state, "rbd_cache", "false", "node1")
print(query.get_all_for_host(state, "node1"))
```

### Checking devices

```python
from microceph.common.storage import is_ceph_device, is_mounted

is_mounted("/dev/sdb")       # listed as a source in <TEST_ROOT_PATH>/proc/mounts?
is_ceph_device("/dev/sdc")   # target of block, block.wal or block.db of an OSD?
```

## What the package does not do

This package is a library only. It provides:

- no daemon,
- no command-line tool,
- no HTTP API.

It does not run Ceph commands, and it does not deploy or configure Ceph
services. The database is a local SQLite file and is not replicated between
members.

## Running the tests

```
pip install .[test]
pytest
```