from mangum import Mangum

from debt_ledger.api import create_app

app = create_app()

handler = Mangum(app)
