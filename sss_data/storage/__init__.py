from pathlib import Path

STORAGE_FOLDER = Path(__file__).parent
CPI_U_ANNUAL_PATH = STORAGE_FOLDER / "cpi_u_annual.csv"
