from wkpoule import create_app, db
from wkpoule.models import (
    ActualGroupStanding,
    GlobalSetting,
    Match,
    Player,
    Poule,
    PouleMember,
    Prediction,
    ScoringRun,
    User,
)

app = create_app()


@app.shell_context_processor
def make_shell_context():
    return {
        "db": db,
        "User": User,
        "Poule": Poule,
        "PouleMember": PouleMember,
        "Match": Match,
        "Prediction": Prediction,
        "Player": Player,
        "ActualGroupStanding": ActualGroupStanding,
        "GlobalSetting": GlobalSetting,
        "ScoringRun": ScoringRun,
    }


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=5000, debug=True)
