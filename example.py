from datetime import date

from ecb_rates import EcbRates, NotFoundError

print(EcbRates.__version__)  # 0.1.0

# Default Usage: local SQLite file ``ecb_rates.db`` in the working directory
fx = EcbRates()

# Fetch the last 90 days from the ECB and upsert them (safe to re-run)
result = fx.seed()
print(result)
# => PersistenceResult(inserted=62, updated=0)

# Latest reference rates
print(fx.latest_payload())
# => {'base': 'EUR', 'rates': {'AUD': 1.6472, 'BGN': 1.9558, ...}}

# Rates for a specific date (str or datetime.date)
try:
    print(fx.rate(date(2024, 1, 2)).rates)
except NotFoundError as exc:
    print(exc)

# Min/max/avg per currency across every stored date
for stat in fx.analyze()[:3]:
    print(stat)
# => AggregateStat(currency='AUD', min=1.6118, max=1.6581, avg=1.6342...)

fx.close()
