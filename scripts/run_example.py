import argparse
import logging

import numpy as np

from coop_box_pushing import Action, BoxPushingEnv, task_presets


def main():
    parser = argparse.ArgumentParser(description="Roll out uniformly random agents on a box-pushing field.")
    parser.add_argument("--task", type=str, default="classic", choices=list(task_presets().keys()))
    parser.add_argument("--episodes", type=int, default=5)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--render_every", type=int, default=0, help="If >0, render the final field every N episodes.")
    parser.add_argument("--log-level", type=str, default="WARNING", help="Python logging level, e.g. DEBUG or INFO.")
    args = parser.parse_args()

    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(name)s %(levelname)s %(message)s")

    preset = task_presets()[args.task]
    preset.env_config.seed = args.seed
    env = BoxPushingEnv(config=preset.env_config)
    rng = np.random.default_rng(args.seed)
    actions = list(Action)

    wins = 0
    for ep in range(args.episodes):
        obs = env.reset()
        done = False
        steps = 0
        returns = {aid: 0.0 for aid in obs}
        while not done:
            chosen = {aid: actions[int(rng.integers(len(actions)))] for aid in obs}
            obs, rewards, dones, infos = env.step(chosen)
            for aid, reward in rewards.items():
                returns[aid] += reward
            done = dones["__all__"]
            steps += 1
        won = env.episode.state.won
        wins += int(won)
        print(f"Episode {ep+1}/{args.episodes}: return={returns['agent_0']:.2f}, steps={steps}, won={won}")
        if args.render_every and (ep + 1) % args.render_every == 0:
            print(env.render())

    print(f"Won {wins}/{args.episodes} episodes on task '{args.task}'.")


if __name__ == "__main__":
    main()
