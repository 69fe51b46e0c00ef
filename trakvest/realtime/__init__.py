"""Real-time price push: subscriber registry and broadcast loop."""
