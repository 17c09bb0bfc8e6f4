"""HTTP routers mounted by :mod:`calchub.main`."""
