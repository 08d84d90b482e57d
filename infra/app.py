import aws_cdk as cdk
from patterns_stack import PatternsStack

app = cdk.App()
PatternsStack(app, "PatternsStack")
app.synth()
