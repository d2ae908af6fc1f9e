"""File cache -- cold start optimization.

Demonstrates FileSystemCache: the first engine parses the template and
writes the parsed tree to disk, a second engine with a fresh in-process
cache loads that tree and skips the lexer and parser entirely.

Run:
    python app.py
"""

from tempfile import TemporaryDirectory

from moustache import DictLoader, Engine, FileSystemCache

templates = {
    "page": """\
<html>
<head><title>{{title}}</title></head>
<body>
<ul>
{{#entries}}
  <li>{{.}}</li>
{{/entries}}
</ul>
</body>
</html>
""",
}

tmpdir = TemporaryDirectory()
cache = FileSystemCache(tmpdir.name)

data = {"title": "Cached Page", "entries": ["alpha", "beta", "gamma"]}

# First engine: parse from source + write the tree to the cache (miss)
engine1 = Engine(loader=DictLoader(templates), cache=cache)
output_first = engine1.render("page", data)
stats_after_first = cache.stats()

# Second engine: same cache directory, empty in-process cache (hit)
engine2 = Engine(loader=DictLoader(templates), cache=cache)
output_second = engine2.render("page", data)
stats_after_second = cache.stats()

output = output_first


def main() -> None:
    print("=== First Load (parse + cache) ===")
    print(f"  Output: {output_first[:60]}...")
    print(f"  Cache files: {stats_after_first['file_count']}")
    print(f"  Cache bytes: {stats_after_first['total_bytes']}")
    print()
    print("=== Second Load (from cache) ===")
    print(f"  Output: {output_second[:60]}...")
    print(f"  Cache files: {stats_after_second['file_count']}")
    print(f"  Outputs match: {output_first == output_second}")


if __name__ == "__main__":
    main()
