from ecb_rates import EcbRates

# MongoDB stores one document per rate date and runs the analysis as an
# aggregation pipeline inside the server.
fx = EcbRates(db_config="mongodb://127.0.0.1:27017/currencydb")

success, error = fx.connection()  # => to check the connectivity
if not success:
    print(error)
    exit(1)

fx.seed(feed="hist-90d")

print(fx.latest_payload())
print(fx.rate_payload("2024-01-02"))
print(fx.analysis_payload())
# => {'base': 'EUR', 'rates': {'AUD': {'min': ..., 'max': ..., 'avg': ...}, ...}}

# Serve the same facade over HTTP:
#   ecb-rates-serve --db mongodb://127.0.0.1:27017/currencydb --port 3000
#   curl localhost:3000/rates/latest
fx.close()
