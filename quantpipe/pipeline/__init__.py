"""High level code for driving a quantification run.

  - run_info.py: Resolve command line arguments into a RunConfig.
  - workspace.py: Prepare the run output directory.
  - config_utils.py: Load the YAML system configuration.
  - main.py: Command line entry point tying the steps together.
"""
