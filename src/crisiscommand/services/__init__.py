"""Emergency service organizations (Police, Fire, Ambulance, ...)."""
