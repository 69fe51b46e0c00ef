"""Portfolio bounded context: accounts, holdings, instruments and goals."""
