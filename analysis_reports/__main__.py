from analysis_reports.cli import main

main()
