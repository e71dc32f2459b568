from sdkgen.cli import app

app(prog_name="sdkgen")
