"""Fleet and finance back-office API."""
