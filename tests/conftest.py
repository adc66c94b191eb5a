import json

import pytest

from app import app as flask_app


@pytest.fixture
def app():
    from copy import deepcopy
    old_config = deepcopy(flask_app.config)
    flask_app.config.update({
        "TESTING": True,
    })

    with flask_app.app_context():
        yield flask_app

    flask_app.config = old_config

@pytest.fixture
def client(app):
    return app.test_client()

@pytest.fixture
def temp_config(tmp_path):
    """Fixture to provide a temporary configuration file."""
    test_config_dir = tmp_path / "config"
    test_config_dir.mkdir()
    test_config_file = test_config_dir / "config.json"

    # Mock CONFIG_FILE in config module
    import config
    original_config_file = config.CONFIG_FILE
    original_config_dir = config.CONFIG_DIR

    config.CONFIG_FILE = str(test_config_file)
    config.CONFIG_DIR = str(test_config_dir)

    yield test_config_file

    # Restore original paths
    config.CONFIG_FILE = original_config_file
    config.CONFIG_DIR = original_config_dir


def _json_ld_item(name, year="", director=None, image="", url=""):
    item = {"@type": "Movie", "name": name, "datePublished": year, "image": image, "url": url}
    if director:
        item["director"] = {"@type": "Person", "name": director}
    return {"@type": "ListItem", "item": item}


@pytest.fixture
def json_ld_page():
    """A list page whose movies are only described by a JSON-LD ItemList."""
    data = {
        "@context": "http://schema.org",
        "@type": "ItemList",
        "itemListElement": [
            _json_ld_item(
                "Movie A", "2001", "Director A",
                "https://a.ltrbxd.com/resized/film-poster/1/a-0-230-0-345-crop.jpg",
                "https://letterboxd.com/film/movie-a/",
            ),
            _json_ld_item(
                "Movie B", "2002", None,
                "https://a.ltrbxd.com/resized/film-poster/2/b-0-70-0-105-crop.jpg",
                "/film/movie-b/",
            ),
            _json_ld_item(
                "Movie C", "2003-05-03", "Director C",
                "/resized/film-poster/3/c.jpg",
                "https://letterboxd.com/film/movie-c/",
            ),
        ],
    }
    return (
        "<html><head>"
        '<script type="application/ld+json">\n/* <![CDATA[ */\n'
        + json.dumps(data)
        + "\n/* ]]> */\n</script>"
        "</head><body><p>Nothing else here</p></body></html>"
    )


@pytest.fixture
def list_item_page():
    """A list page using <li class="listitem"> entries and no JSON-LD."""
    return """
    <html><body>
    <ul class="js-list-entries">
      <li class="listitem poster-container" data-film-name="Am&eacute;lie &amp; Co">
        <div class="poster film-poster" data-film-release-year="2001">
          <img src="https://s.ltrbxd.com/static/img/empty-poster-70.png"
               data-src="https://a.ltrbxd.com/resized/film-poster/1/2/amelie-0-70-0-105-crop.jpg"
               class="image" alt="Amelie" />
          <a href="/film/amelie/" class="frame"><span class="frame-title">Amelie</span></a>
        </div>
      </li>
      <li class="listitem">
        <a class="film-title" href="/film/heat/1995/">Heat</a>
        <img data-src="/resized/film-poster/heat.jpg" />
      </li>
      <li class="listitem"><div class="poster"></div></li>
      <li class="other"><a class="film-title" href="/film/ignored/">Ignored</a></li>
    </ul>
    </body></html>
    """


@pytest.fixture
def poster_list_page():
    """A legacy poster grid with neither JSON-LD nor listitem entries."""
    return """
    <html><body>
    <ul class="poster-list -p70 -grid">
      <li class="poster-container">
        <div class="film-poster" data-film-slug="the-godfather" data-target-link="/film/the-godfather/">
          <img src="https://a.ltrbxd.com/resized/film-poster/5/1/8/51818-the-godfather-0-70-0-105-crop.jpg"
               alt="The Godfather" />
          <a href="/film/the-godfather/">The Godfather</a>
        </div>
      </li>
      <li class="poster-container">
        <img src="/static/img/empty-poster-70.png" alt="Heat &amp; Dust" />
      </li>
      <li class="poster-container"><div></div></li>
    </ul>
    </body></html>
    """
