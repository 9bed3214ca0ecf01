"""
Community-contributed timer stores for duracron.

These require optional dependencies:

```bash
pip install duracron[redis]
pip install duracron[postgres]
```

## Usage

```python
from duracron.contrib.storage.redis import RedisTimerStore
from duracron.contrib.storage.postgres import PostgreSQLTimerStore
```
"""
