from salon_api.main import run

run()
