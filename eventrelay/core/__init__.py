"""eventrelay core — codec, publisher, deadline and batch coordinator."""
