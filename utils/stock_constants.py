STOCK_OUT = "out"
STOCK_LOW = "low"
STOCK_GOOD = "good"

# Row order for listings: most urgent first
PRIORITY_RANK = {"High": 0, "Medium": 1, "Low": 2}
