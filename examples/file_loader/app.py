"""File-based templates -- the most common real-world pattern.

Loads pages and partials from disk with FileSystemLoader. Names resolve
relative to the templates directory, and the ``.mustache`` extension is
added for you.

Run:
    python app.py
"""

from pathlib import Path

from moustache import Engine, FileSystemLoader

templates_dir = Path(__file__).parent / "templates"
loader = FileSystemLoader(templates_dir)
engine = Engine(loader=loader, partials_loader=loader)

site = {
    "site_name": "My Site",
    "nav_items": [
        {"url": "/", "label": "Home"},
        {"url": "/about", "label": "About"},
    ],
}

home_template = engine.load_template("home")
about_template = engine.load_template("about")

home_output = home_template.render(
    site,
    title="Welcome",
    message="This is a moustache-powered site with shared partials.",
)

about_output = about_template.render(
    site,
    title="About Us",
    description="Built with moustache, logic-less templates for Python.",
)


def main() -> None:
    print("=== Home Page ===")
    print(home_output)
    print()
    print("=== About Page ===")
    print(about_output)


if __name__ == "__main__":
    main()
