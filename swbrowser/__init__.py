"""Star Wars Databank browser with SWAPI enrichment."""
