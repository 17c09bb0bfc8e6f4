"""CalcHub service package: calculator catalog, favorites and calculation history."""
